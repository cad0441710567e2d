"""Application services: category resolution, token codec, packing, delivery."""

from memberdir.application.services.carousel_packer import CarouselPacker
from memberdir.application.services.category_resolver import CategoryResolver
from memberdir.application.services.pagination_token import (
    decode_token,
    encode_token,
)
from memberdir.application.services.reply_delivery import ReplyDeliveryService

__all__ = [
    "CarouselPacker",
    "CategoryResolver",
    "ReplyDeliveryService",
    "decode_token",
    "encode_token",
]
