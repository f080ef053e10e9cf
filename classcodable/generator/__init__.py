"""classcodable code generator."""

from .dispatch import GenerationError as GenerationError
from .dispatch import OnlyApplicableToRecordType as OnlyApplicableToRecordType
from .dispatch import generate as generate
from .dispatch import generate_all as generate_all
from .dispatch import mode_for as mode_for
from .fields import extract_fields as extract_fields
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .synthesis import synthesize_decoder as synthesize_decoder
from .synthesis import synthesize_encoder as synthesize_encoder
from .synthesis import synthesize_initializer as synthesize_initializer
from .synthesis import synthesize_key_mapping as synthesize_key_mapping
from .types import *
