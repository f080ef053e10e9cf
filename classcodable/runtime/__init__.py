"""Runtime support for classcodable generated code."""

from .coding import Codable as Codable
from .coding import CodingError as CodingError
from .coding import Decodable as Decodable
from .coding import Decoder as Decoder
from .coding import Encodable as Encodable
from .coding import Encoder as Encoder
from .coding import KeyedDecodingContainer as KeyedDecodingContainer
from .coding import KeyedEncodingContainer as KeyedEncodingContainer
from .coding import KeyNotFoundError as KeyNotFoundError
from .coding import TypeMismatchError as TypeMismatchError
from .coding import dumps as dumps
from .coding import from_dict as from_dict
from .coding import loads as loads
from .coding import to_dict as to_dict
