from .pagou_client import PagouClient
from .payment_payload_mapper import map_to_pagou_payload, map_pagou_status

__all__ = ["PagouClient", "map_to_pagou_payload", "map_pagou_status"]
