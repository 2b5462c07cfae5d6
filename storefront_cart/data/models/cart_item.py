from sqlalchemy import Column, Integer, ForeignKey, String, Boolean, JSON
from sqlalchemy.orm import relationship

from storefront_cart.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    # [{"name": "color", "value": "red"}, ...]
    variant_options = Column(JSON, nullable=False, default=list)

    quantity = Column(Integer, nullable=False)

    # fakty cenowe z product-service w chwili zapisu, cene liczymy przy odczycie
    name = Column(String, nullable=False)
    base_price = Column(Integer, nullable=False)
    product_discount = Column(Integer, nullable=False, default=0)
    compare_at_price = Column(Integer, nullable=True)
    image = Column(String, nullable=True)

    is_flash_deal = Column(Boolean, nullable=False, default=False)
    flash_deal_end_time = Column(String, nullable=True)
    is_special_offer = Column(Boolean, nullable=False, default=False)
    special_offer_end_time = Column(String, nullable=True)
    campaign_label = Column(String, nullable=True)

    cart = relationship("CartModel", back_populates="items")
