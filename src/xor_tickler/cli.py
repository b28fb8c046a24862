import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import click
from rich.console import Console

from xor_tickler.criteria import Criterion, CriterionSpecError, FunctionCriterion, parse_criterion
from xor_tickler.demo_client import DEFAULT_DEMO_URL, fetch_demo_data, submit_key
from xor_tickler.keysize import DEFAULT_MIN_KEYSIZE, KeysizeRangeError, estimate_keysizes
from xor_tickler.log import configure_logging
from xor_tickler.solver import RepeatedKeyResult, attack_repeated_key, solve_single_byte
from xor_tickler.state_queue import SingleSlotQueue
from xor_tickler.state_snapshot import AttackSnapshot
from xor_tickler.ui import render_keysizes, ui_loop
from xor_tickler.utils import (
    b64_decode,
    b64_encode,
    decode_input,
    hex_decode,
    hex_encode,
    load_ciphertext,
    load_criterion_fn,
    CIPHERTEXT_FORMATS,
    PluginLoadError,
    PluginSignatureError,
)
from xor_tickler.xor import InvalidKeyError, xor_apply

DEMO_KEYSIZES_TRY = 3

# Below twice each demo key length. A multiple of the key length gives short
# columns whose wrong key bytes can still score a perfect text ratio.
DEMO_MAX_KEYSIZES = {
    "demo2": 9,
    "demo3": 25,
}


class CriterionType(click.ParamType):
    """Click parameter for criterion names: printable, text or byte(N)."""

    name = "criterion"

    def convert(self, value, param, ctx):
        if not isinstance(value, str):
            return value
        try:
            return parse_criterion(value)
        except CriterionSpecError as e:
            self.fail(str(e), param, ctx)


CRITERION = CriterionType()


def read_stdin() -> bytes:
    return sys.stdin.buffer.read()


def write_stdout(data: bytes) -> None:
    stdout = sys.stdout.buffer
    stdout.write(data)
    stdout.flush()


def resolve_key(key: Optional[str], key_hex: Optional[str]) -> bytes:
    """Pick the XOR key from either the text or the hex option."""
    if key is not None and key_hex is not None:
        raise click.UsageError("Use either --key or --key-hex, not both")
    if key_hex is not None:
        try:
            return hex_decode(key_hex)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--key-hex")
    if key is None:
        raise click.UsageError("No key received: pass --key or --key-hex")
    return key.encode("utf-8")


def resolve_criterion(criterion: Criterion, criterion_fn: Optional[str]) -> Criterion:
    """A criterion plugin file, when given, wins over the named criterion."""
    if criterion_fn is None:
        return criterion
    try:
        return FunctionCriterion(load_criterion_fn(criterion_fn), name=criterion_fn)
    except (PluginLoadError, PluginSignatureError) as e:
        raise click.BadParameter(str(e), param_hint="--criterion-fn")


def run_repeated_attack(ciphertext: bytes, live: bool, **attack_kwargs) -> RepeatedKeyResult:
    """Run the repeated-key attack, optionally with the live UI on this thread."""
    if not live:
        return attack_repeated_key(ciphertext, **attack_kwargs)

    state_queue: SingleSlotQueue[AttackSnapshot] = SingleSlotQueue()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(attack_repeated_key, ciphertext, state_queue=state_queue, **attack_kwargs)

        try:
            ui_loop(state_queue)
        except KeyboardInterrupt:
            state_queue.close()

        return future.result()


def write_repeated_result(result: RepeatedKeyResult) -> None:
    write_stdout(b"Key: " + result.key + b"\nDecrypted:\n" + result.plaintext)


@click.group()
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug) to stderr")
def cli(verbose: int):
    configure_logging(verbose)


@cli.group()
def encode():
    """Encode stdin with the specified encoding."""


@encode.command("hex")
def encode_hex():
    """Encode input in hex."""
    click.echo(hex_encode(read_stdin()), nl=False)


@encode.command("base64")
def encode_base64():
    """Encode input in base64."""
    click.echo(b64_encode(read_stdin()), nl=False)


@cli.group()
def decode():
    """Decode stdin with the specified encoding."""


@decode.command("hex")
def decode_hex():
    """Decode input from hex."""
    try:
        write_stdout(hex_decode(read_stdin().decode("ascii")))
    except (UnicodeDecodeError, ValueError) as e:
        raise click.ClickException(f"Invalid hex input: {e}")


@decode.command("base64")
def decode_base64():
    """Decode input from base64."""
    try:
        write_stdout(b64_decode(read_stdin().decode("ascii")))
    except (UnicodeDecodeError, ValueError) as e:
        raise click.ClickException(f"Invalid base64 input: {e}")


key_option = click.option("--key", "-k", help="XOR key to be used")
key_hex_option = click.option("--key-hex", help="XOR key to be used, given in hex")


@cli.command()
@key_option
@key_hex_option
def encrypt(key: Optional[str], key_hex: Optional[str]):
    """Encrypt stdin with repeating-key XOR."""
    xor_key = resolve_key(key, key_hex)
    try:
        write_stdout(xor_apply(read_stdin(), xor_key))
    except InvalidKeyError as e:
        raise click.UsageError(str(e))


@cli.command()
@key_option
@key_hex_option
def decrypt(key: Optional[str], key_hex: Optional[str]):
    """Decrypt stdin with repeating-key XOR."""
    xor_key = resolve_key(key, key_hex)
    try:
        write_stdout(xor_apply(read_stdin(), xor_key))
    except InvalidKeyError as e:
        raise click.UsageError(str(e))


@cli.group()
@click.option("--input", "-i", "input_path", type=click.Path(exists=True, dir_okay=False),
              help="Read ciphertext from a file instead of stdin")
@click.option("--format", "-f", "input_format", type=click.Choice(CIPHERTEXT_FORMATS), default="raw",
              show_default=True, help="Encoding of the ciphertext")
@click.pass_context
def attack(ctx: click.Context, input_path: Optional[str], input_format: str):
    """Attack XOR encrypted input."""
    ctx.ensure_object(dict)
    ctx.obj["input_path"] = input_path
    ctx.obj["input_format"] = input_format


def read_ciphertext(ctx: click.Context) -> bytes:
    input_path = ctx.obj["input_path"]
    input_format = ctx.obj["input_format"]
    try:
        if input_path:
            return load_ciphertext(input_path, input_format)
        return decode_input(read_stdin(), input_format)
    except (UnicodeDecodeError, ValueError) as e:
        raise click.ClickException(f"Could not decode {input_format} ciphertext: {e}")


criterion_fn_option = click.option(
    "--criterion-fn", type=click.Path(exists=True, dir_okay=False),
    help="Python file defining score(data: bytes) -> float, used instead of the named criterion",
)
min_option = click.option("--min", "min_size", type=int, default=DEFAULT_MIN_KEYSIZE, show_default=True,
                          help="Minimum keysize to try")
max_option = click.option("--max", "-m", "max_size", type=int, required=True, help="Maximum keysize to try")
workers_option = click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True,
                              help="Threads used for keysize scoring and column solving")


@attack.command()
@click.option("--criterion", "-c", type=CRITERION, default="printable", show_default=True,
              help="Criterion for scoring the results: printable, text or byte(N)")
@criterion_fn_option
@click.option("--detailed", "-d", is_flag=True, help="Print the key and score along with the result")
@click.pass_context
def single(ctx: click.Context, criterion: Criterion, criterion_fn: Optional[str], detailed: bool):
    """Attack single-byte XOR encrypted input."""
    ciphertext = read_ciphertext(ctx)
    result = solve_single_byte(ciphertext, resolve_criterion(criterion, criterion_fn))

    if detailed:
        write_stdout(f"Key: {result.key}\tScore: {result.score}\tResult: ".encode("ascii") + result.plaintext + b"\n")
    else:
        write_stdout(result.plaintext)


@attack.command()
@min_option
@max_option
@workers_option
@click.option("--plain", is_flag=True, help="Print tab separated lines instead of a table")
@click.pass_context
def keysize(ctx: click.Context, min_size: int, max_size: int, workers: int, plain: bool):
    """Rank the likely keysizes of a repeating-key XOR encryption."""
    ciphertext = read_ciphertext(ctx)
    try:
        candidates = estimate_keysizes(ciphertext, min_size, max_size, workers=workers)
    except KeysizeRangeError as e:
        raise click.UsageError(str(e))

    if plain:
        for candidate in candidates:
            click.echo(f"Size: {candidate.size}\tScore: {candidate.score}")
    else:
        Console().print(render_keysizes(candidates))


@attack.command()
@min_option
@max_option
@click.option("--xor-criterion", "-x", type=CRITERION, default="text", show_default=True,
              help="Criterion for scoring each key column")
@click.option("--criterion", "-c", type=CRITERION, default="text", show_default=True,
              help="Criterion for scoring the full results of different keysizes")
@click.option("--keysizes-try", "-t", type=click.IntRange(min=1), default=1, show_default=True,
              help="How many of the best ranked keysizes to try")
@criterion_fn_option
@workers_option
@click.option("--live/--no-live", default=None, help="Show a live table of recovered key bytes (default: when stderr is a terminal)")
@click.pass_context
def repeated(
    ctx: click.Context,
    min_size: int,
    max_size: int,
    xor_criterion: Criterion,
    criterion: Criterion,
    keysizes_try: int,
    criterion_fn: Optional[str],
    workers: int,
    live: Optional[bool],
):
    """Attack repeated-key XOR encrypted input."""
    ciphertext = read_ciphertext(ctx)
    if live is None:
        live = Console(stderr=True).is_terminal

    try:
        result = run_repeated_attack(
            ciphertext,
            live,
            min_size=min_size,
            max_size=max_size,
            keysizes_to_try=keysizes_try,
            column_criterion=resolve_criterion(xor_criterion, criterion_fn),
            result_criterion=criterion,
            workers=workers,
        )
    except KeysizeRangeError as e:
        raise click.UsageError(str(e))

    write_repeated_result(result)


demo_url_option = click.option("--url", default=DEFAULT_DEMO_URL, show_default=True,
                               envvar="XOR_TICKLER_DEMO_URL", help="Base URL of the demo API")


def report_demo(url: str, demo: str, key: bytes, plaintext: bytes) -> None:
    valid = submit_key(url, demo, key)
    click.echo(f"Key: {key!r} ({'valid' if valid else 'NOT valid'})")
    click.echo(plaintext.decode("utf-8", errors="replace"))


def run_repeated_demo(url: str, demo: str, live: bool) -> None:
    ciphertext = fetch_demo_data(url, demo)
    result = run_repeated_attack(
        ciphertext,
        live,
        max_size=DEMO_MAX_KEYSIZES[demo],
        keysizes_to_try=DEMO_KEYSIZES_TRY,
    )
    report_demo(url, demo, result.key, result.plaintext)


@cli.command()
@demo_url_option
def demo1(url: str):
    """Run with data from the demo1 endpoint (single-byte key)."""
    ciphertext = fetch_demo_data(url, "demo1")
    result = solve_single_byte(ciphertext, parse_criterion("text"))
    report_demo(url, "demo1", bytes([result.key]), result.plaintext)


@cli.command()
@demo_url_option
@click.option("--live/--no-live", default=True)
def demo2(url: str, live: bool):
    """Run with data from the demo2 endpoint (short repeating key)."""
    run_repeated_demo(url, "demo2", live)


@cli.command()
@demo_url_option
@click.option("--live/--no-live", default=True)
def demo3(url: str, live: bool):
    """Run with data from the demo3 endpoint (longer repeating key)."""
    run_repeated_demo(url, "demo3", live)


@cli.command("demo-api")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def demo_api(host: str, port: int, reload: bool):
    """Start the demo API server that hands out XOR encrypted samples."""
    import uvicorn
    from demo_api.api import app

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/demo1    - Single-byte key demo")
    click.echo("  - GET  /api/demo2    - Short repeating key demo")
    click.echo("  - GET  /api/demo3    - Long text, long key demo")
    click.echo("  - POST /api/encrypt  - Encrypt plaintext with a given key")
    click.echo("  - POST /api/validate - Check a recovered demo key")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        # Use import string for reload mode
        uvicorn.run("demo_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    cli()
