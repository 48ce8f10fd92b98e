from .tenancy import Retailer, Location
from .auth import User, SessionToken
from .customers import Customer
from .orders import Order

__all__ = [
    'Retailer', 'Location',
    'User', 'SessionToken',
    'Customer',
    'Order',
]
