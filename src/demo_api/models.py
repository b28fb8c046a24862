from pydantic import BaseModel

from .samples import Algorithm, Demo


class EncryptRequest(BaseModel):
    plaintext_b64: str
    key_b64: str


class EncryptResponse(BaseModel):
    alg: Algorithm
    ciphertext_b64: str
    ciphertext_hex: str


class ValidateRequest(BaseModel):
    demo: Demo
    key_b64: str


class ValidateResponse(BaseModel):
    valid: bool
