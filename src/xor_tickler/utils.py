import base64
import binascii
import importlib.util
import inspect
import types
from typing import Callable, Union, Literal, TypeAlias

BytesLike = Union[bytes, bytearray, memoryview]

PLUGIN_FUNC_NAME = "score"

CiphertextFormat: TypeAlias = Union[Literal[
    "b64",
    "b64_urlsafe",
    "hex",
    "raw"
], str]

CIPHERTEXT_FORMATS = ("b64", "b64_urlsafe", "hex", "raw")


class PluginLoadError(RuntimeError):
    pass


class PluginSignatureError(TypeError):
    pass


def load_module_from_file(module_file_path: str) -> types.ModuleType:
    """Load a Python module file."""
    spec = importlib.util.spec_from_file_location("criterion_fn", module_file_path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Could not load spec for: {module_file_path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # executes user code
    return mod


def load_criterion_fn(module_file_path: str) -> Callable[[bytes], float]:
    """Load a user defined scoring function from a Python module file."""
    mod = load_module_from_file(module_file_path)
    fn = getattr(mod, PLUGIN_FUNC_NAME, None)
    if fn is None or not callable(fn):
        raise PluginLoadError(
            f"Plugin must define `{PLUGIN_FUNC_NAME}(data: bytes) -> float`"
        )

    sig = inspect.signature(fn)
    params = list(sig.parameters.values())
    if len(params) != 1 or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise PluginSignatureError(
            f"{PLUGIN_FUNC_NAME} must accept exactly one positional arg: (data: bytes)"
        )
    return fn


def decode_input(data: bytes, format: CiphertextFormat) -> bytes:
    """Decode raw input bytes according to the given ciphertext format."""
    if format == "b64":
        return b64_decode(data.decode("ascii").strip())
    elif format == "b64_urlsafe":
        return b64_decode(data.decode("ascii").strip(), urlsafe=True)
    elif format == "hex":
        return hex_decode(data.decode("ascii"))
    elif format == "raw":
        return data
    else:
        raise ValueError(f"Invalid ciphertext format: {format}")


def load_ciphertext(file_path: str, format: CiphertextFormat) -> bytes:
    """Load the ciphertext from a file."""
    with open(file_path, "rb") as f:
        data = f.read()
    return decode_input(data, format)


def _as_bytes(
    data: Union[str, BytesLike],
    *,
    encoding: str = "utf-8",
) -> bytes:
    """Normalize values to type bytes."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode(encoding)
    raise TypeError(f"Expected str or bytes-like, got {type(data).__name__}")


def hex_encode(data: BytesLike) -> str:
    return bytes(data).hex()


def hex_decode(hex_text: str) -> bytes:
    """Decode hex, ignoring whitespace and line breaks."""
    return bytes.fromhex("".join(hex_text.split()))


def b64_encode(
    data: Union[str, BytesLike],
    *,
    urlsafe: bool = False,
    text_encoding: str = "utf-8",
) -> str:
    """Accepts str/bytes/etc and return a base64 string (standard or URL-safe)."""
    raw = _as_bytes(data, encoding=text_encoding)
    fn = base64.urlsafe_b64encode if urlsafe else base64.b64encode
    return fn(raw).decode("ascii")


def b64_decode(
    b64_text: str,
    *,
    urlsafe: bool = False,
    return_str: bool = False,
    text_encoding: str = "utf-8",
) -> Union[bytes, str]:
    """Decodes either standard or URL-safe b64. Tolerates missing '=' padding."""
    b64_text = "".join(b64_text.split())

    # normalize padding
    missing = len(b64_text) % 4
    if missing:
        b64_text += "=" * (4 - missing)

    if urlsafe:
        out = base64.urlsafe_b64decode(b64_text)
    else:
        try:
            out = base64.b64decode(b64_text, validate=True)
        except binascii.Error:
            out = base64.urlsafe_b64decode(b64_text)  # URL-safe fallback

    if return_str:
        return out.decode(text_encoding)
    return out
