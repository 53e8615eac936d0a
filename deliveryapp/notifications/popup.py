def popup(message: str, type: str = "success", title: str | None = None):
    body = {"type": type, "message": message}
    if title:
        body["title"] = title
    return {"popup": body}
