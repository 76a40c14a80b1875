# Import SQLAlchemy models so they register on Base.metadata
from app.models.order import DeletionOrigin, Order, OrderStatus, PaymentStatus  # noqa: F401
