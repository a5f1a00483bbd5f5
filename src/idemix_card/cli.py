from idemix_card.library.client.service import IdemixService
from idemix_card.library.transport.channel import CardChannel
from idemix_card.library.types.errors import CardServiceError
from idemix_card.library.types.message import Message
from idemix_card.library.types.structure import (
    AttributeValues,
    IssuanceSpec,
    ProofSpec,
)
from idemix_card.util.bytes.hex_string import (
    HexStringError,
    HexStringUtil,
    validate_hex_integer,
)
from idemix_card.util.logging import set_debug
from idemix_card.config import READER_NAME
from pydantic import BaseModel, ValidationError
from result import Ok, do
from typing import Optional, Type, TypeVar
import click

ModelType = TypeVar("ModelType", bound=BaseModel)

###
# Utility Functions
###


def _load_model(model: Type[ModelType], path: str) -> ModelType:
    """Read a JSON document into a Pydantic model.

    Raises:
        click.ClickException: If the file cannot be read or does not validate
    """
    try:
        with open(path, "r") as f:
            return model.model_validate_json(f.read())
    except OSError as e:
        raise click.ClickException(f"Failed to read {path}: {e}")
    except ValidationError as e:
        raise click.ClickException(f"Invalid {model.__name__} in {path}: {e}")


def _write_model(value: BaseModel, output: Optional[str]) -> None:
    document = value.model_dump_json(indent=2)
    if output:
        try:
            with open(output, "w") as f:
                f.write(document)
        except OSError as e:
            raise click.ClickException(f"Failed to write {output}: {e}")
        click.echo(f"Saved to {output}")
    else:
        click.echo(document)


def _parse_integer(value: str) -> int:
    try:
        if value.startswith("0x"):
            return validate_hex_integer(value)
        return validate_hex_integer(int(value))
    except (HexStringError, ValueError):
        raise click.BadParameter(f"Not a non-negative integer: {value}")


def _parse_pin(value: str) -> bytes:
    if value.startswith("0x"):
        parsed = HexStringUtil.str_to_bytes(value)
        if parsed.is_err():
            raise click.BadParameter(str(parsed.unwrap_err()))
        if not parsed.unwrap():
            raise click.BadParameter("PIN must not be empty")
        return parsed.unwrap()
    try:
        return value.encode("ascii")
    except UnicodeEncodeError:
        raise click.BadParameter("PIN must contain only ASCII characters")


def _open_service(ctx: click.Context) -> IdemixService:
    """Build the service on the injected channel, or on a PC/SC reader."""
    channel: Optional[CardChannel] = ctx.obj.get("channel")
    if channel is None:
        from idemix_card.library.transport.pcsc import PcscChannel

        channel = PcscChannel(ctx.obj["reader"])
    service = IdemixService(channel)
    try:
        service.open()
    except CardServiceError as e:
        raise click.ClickException(f"Failed to open the Idemix applet: {e}")
    ctx.call_on_close(service.close)
    return service


###
# Commands
###


@click.group(help="CLI tool for driving an Idemix smart card.")
@click.option(
    "--reader",
    type=str,
    default=READER_NAME,
    help="Substring of the PC/SC reader name (default: first reader).",
)
@click.option("--debug", is_flag=True, help="Log every command and response frame.")
@click.pass_context
def cli(ctx: click.Context, reader: str, debug: bool) -> None:
    set_debug(debug)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("reader", reader)


@click.command(help="Select the Idemix applet.")
@click.pass_context
def select(ctx: click.Context) -> None:
    _open_service(ctx)
    click.echo("Idemix applet selected")


@click.command(name="generate-secret", help="Generate the master secret on the card.")
@click.pass_context
def generate_secret(ctx: click.Context) -> None:
    service = _open_service(ctx)
    result = service.generate_master_secret()
    if result.is_err():
        raise click.ClickException(str(result.unwrap_err()))
    click.echo("Master secret available")


@click.command(
    name="verify-pin",
    help="Authorize using the card holder PIN, given as ASCII digits or as 0x-prefixed hex bytes.",
)
@click.argument("pin", type=str)
@click.pass_context
def verify_pin(ctx: click.Context, pin: str) -> None:
    encoded_pin = _parse_pin(pin)

    service = _open_service(ctx)
    result = service.verify_pin(encoded_pin)
    if result.is_err():
        raise click.ClickException(str(result.unwrap_err()))
    click.echo("PIN accepted")


@click.command(help="Obtain a credential on the card.")
@click.argument("spec_path", type=click.Path(exists=True))
@click.argument("values_path", type=click.Path(exists=True))
@click.argument("message_path", type=click.Path(exists=True))
@click.option(
    "--output",
    type=click.Path(),
    help="Path where the round 1 message for the issuer will be saved.",
)
@click.pass_context
def issue(
    ctx: click.Context,
    spec_path: str,
    values_path: str,
    message_path: str,
    output: Optional[str],
) -> None:
    """Run the recipient side of the issuance protocol.

    Args:
        spec_path: JSON IssuanceSpec
        values_path: JSON object of attribute name -> value
        message_path: JSON Message from the issuer carrying the nonce n_1
        output: Optional path for the round 1 message
    """
    spec = _load_model(IssuanceSpec, spec_path)
    values = _load_model(AttributeValues, values_path)
    message = _load_model(Message, message_path)

    service = _open_service(ctx)
    result = do(
        Ok((session, reply))
        for session in service.set_issuance_specification(spec)
        for _ in service.set_attributes(session, values)
        for reply in service.round1(session, message)
    )
    if result.is_err():
        raise click.ClickException(f"Issuance failed: {result.unwrap_err()}")
    session, reply = result.unwrap()
    _write_model(reply, output)

    signature_path = click.prompt(
        "Path to the issuer's signature message",
        type=click.Path(exists=True),
    )
    signature = _load_model(Message, signature_path)
    completed = service.round3(session, signature)
    if completed.is_err():
        raise click.ClickException(f"Issuance failed: {completed.unwrap_err()}")
    click.echo("Credential issued")


@click.command(help="Prove possession of a credential on the card.")
@click.argument("spec_path", type=click.Path(exists=True))
@click.argument("nonce", type=str)
@click.option(
    "--output",
    type=click.Path(),
    help="Path where the proof will be saved.",
)
@click.pass_context
def prove(ctx: click.Context, spec_path: str, nonce: str, output: Optional[str]) -> None:
    spec = _load_model(ProofSpec, spec_path)
    nonce_value = _parse_integer(nonce)

    service = _open_service(ctx)
    result = service.build_proof(nonce_value, spec)
    if result.is_err():
        raise click.ClickException(f"Proof failed: {result.unwrap_err()}")
    _write_model(result.unwrap(), output)


cli.add_command(select)
cli.add_command(generate_secret)
cli.add_command(verify_pin)
cli.add_command(issue)
cli.add_command(prove)

if __name__ == "__main__":
    cli()
