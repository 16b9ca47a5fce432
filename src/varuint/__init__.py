import logging

from .codec import (
    MAX_LENGTH,
    MAX_VALUE,
    MalformedInputError,
    decode,
    decoded_length,
    encode,
    encode_into,
    encoded_length,
)
from .settings import Settings

logging.getLogger(__name__).addHandler(logging.NullHandler())
