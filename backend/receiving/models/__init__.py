from .product import Product
from .location import Location
from .inbound_receipt import InboundReceipt
from .inbound_plan_line import InboundPlanLine
from .inbound_receipt_line import InboundReceiptLine
from .inbound_photo import InboundPhotoSlot, InboundPhoto
from .inbound_event import InboundEvent
__all__ = ["Product","Location","InboundReceipt","InboundPlanLine","InboundReceiptLine","InboundPhotoSlot","InboundPhoto","InboundEvent"]
