from order_splitter.models.session import BillSession, Friend, Product

__all__ = ["BillSession", "Friend", "Product"]
