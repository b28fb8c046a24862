from fastapi import FastAPI, APIRouter, HTTPException
import structlog

from xor_tickler.utils import b64_encode, b64_decode
from xor_tickler.xor import xor_apply

from . import models, samples

log = structlog.get_logger()

# Create the FastAPI app
app = FastAPI(title="Repeating-key XOR Demo API")

# Create the router for API endpoints
router = APIRouter()


def build_encrypted_response(alg: samples.Algorithm, ciphertext: bytes) -> models.EncryptResponse:
    """ Build a response carrying the given ciphertext. """
    return models.EncryptResponse(
        alg=alg,
        ciphertext_b64=b64_encode(ciphertext),
        ciphertext_hex=ciphertext.hex(),
    )


def build_demo_response(demo: samples.Demo) -> models.EncryptResponse:
    ciphertext = samples.encrypt_demo(demo)
    log.info(
        "demo encrypted",
        demo=str(demo),
        key_len=len(samples.get_key(demo)),
        ciphertext_len=len(ciphertext),
    )
    return build_encrypted_response(samples.algorithm_for(demo), ciphertext)


@router.get("/demo1", response_model=models.EncryptResponse)
def demo1():
    """ One English sentence under a random single-byte key. """
    return build_demo_response(samples.Demo.DEMO1)


@router.get("/demo2", response_model=models.EncryptResponse)
def demo2():
    """ A paragraph under a random 5-byte repeating key. """
    return build_demo_response(samples.Demo.DEMO2)


@router.get("/demo3", response_model=models.EncryptResponse)
def demo3():
    """ A longer text under a random 13-byte repeating key. """
    return build_demo_response(samples.Demo.DEMO3)


@router.post("/encrypt", response_model=models.EncryptResponse)
def encrypt_api(req: models.EncryptRequest):
    """ Encrypt the given plaintext with the given key and return the ciphertext. """
    try:
        plaintext = b64_decode(req.plaintext_b64)
        key = b64_decode(req.key_b64)
        ciphertext = xor_apply(plaintext, key)
    except ValueError as e:
        log.warning("encryption rejected", error=str(e))
        raise HTTPException(status_code=400, detail=f"Encryption error: {e}")

    log.info(
        "encrypted",
        plaintext_len=len(plaintext),
        key_len=len(key),
        ciphertext_len=len(ciphertext),
    )
    alg = samples.Algorithm.XOR_SINGLE if len(key) == 1 else samples.Algorithm.XOR_REPEATING
    return build_encrypted_response(alg, ciphertext)


@router.post("/validate", response_model=models.ValidateResponse)
def validate(req: models.ValidateRequest):
    """ Check whether a recovered key decrypts the given demo's ciphertext. """
    try:
        key = b64_decode(req.key_b64)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid key encoding: {e}")

    valid = samples.key_decrypts_demo(req.demo, key)
    log.info("key checked", demo=str(req.demo), key_len=len(key), valid=valid)
    return models.ValidateResponse(valid=valid)


# Include the router in the app (after all routes are defined)
app.include_router(router, prefix="/api")
