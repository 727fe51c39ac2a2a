# import all models so SQLAlchemy registers them on Base.metadata

from storefront.data.models.user import UserModel
from storefront.data.models.profile import ProfileModel
from storefront.data.models.order import OrderModel
from storefront.data.models.discount_code import DiscountCodeModel

__all__ = ["UserModel", "ProfileModel", "OrderModel", "DiscountCodeModel"]
