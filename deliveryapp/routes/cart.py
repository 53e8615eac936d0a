from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.cart import CartEngine, line_total
from deliveryapp.dependencies.cart import get_cart
from deliveryapp.dependencies.context import get_store
from deliveryapp.schemas.cart_schemas import CartAddRequest, CartUpdateRequest
from deliveryapp.services.catalog_service import get_product, product_add_ons
from deliveryapp.store.errors import StoreError

router = APIRouter()


def cart_response(cart: CartEngine, **extra):
    return {
        "items": [
            {**item.model_dump(), "line_total": line_total(item)}
            for item in cart.items
        ],
        "item_count": cart.item_count,
        "total": cart.total,
        "popups": cart.feedback.popups,
        **extra,
    }


# View Cart

@router.get("/")
def view_cart(cart: CartEngine = Depends(get_cart)):
    return cart_response(cart)


# Add to Cart

@router.post("/add")
def add_to_cart(data: CartAddRequest, cart: CartEngine = Depends(get_cart), store=Depends(get_store)):
    try:
        product = get_product(store, data.product_id)
        offered = {a.id: a for a in product_add_ons(store, data.product_id)} if product else {}
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar o produto.")

    if not product:
        raise HTTPException(404, "Produto não encontrado")

    unknown = [a for a in data.add_on_ids if a not in offered]
    if unknown:
        raise HTTPException(400, "Adicional indisponível para este produto")

    selected = [
        {"id": a.id, "name": a.name, "price": a.price}
        for a in (offered[i] for i in dict.fromkeys(data.add_on_ids))
    ]

    item = cart.add_item(
        product.id,
        product.name,
        product.price,
        image=product.image_url,
        quantity=data.quantity,
        selected_add_ons=selected,
    )
    return cart_response(cart, item=item.model_dump())


# Update Quantity

@router.put("/update/{line_id}")
def update_cart_item(line_id: str, data: CartUpdateRequest, cart: CartEngine = Depends(get_cart)):
    if cart.get(line_id) is None:
        raise HTTPException(404, "Item não encontrado no carrinho")

    cart.update_quantity(line_id, data.quantity)
    return cart_response(cart)


# Remove Item

@router.delete("/remove/{line_id}")
def remove_cart_item(line_id: str, cart: CartEngine = Depends(get_cart)):
    cart.remove_item(line_id)
    return cart_response(cart)


# Clear Cart

@router.delete("/clear")
def clear_cart(cart: CartEngine = Depends(get_cart)):
    cart.clear_cart()
    return cart_response(cart)
