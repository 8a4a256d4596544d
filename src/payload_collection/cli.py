"""CLI entry point for payload-collection."""

import logging
from pathlib import Path

import click

from payload_collection.errors import PayloadCollectionError
from payload_collection.generator.builder import BodyLayout, BuildOptions, generate_collection
from payload_collection.generator.publisher import DEFAULT_API_HOST, PublishConfig
from payload_collection.generator.sink import DEFAULT_OUTPUT, emit
from payload_collection.parser.collector import collect_fields, resolve_endpoint
from payload_collection.parser.grammar import FieldGrammar
from payload_collection.supply import AnnotatedType, load_target

GRAMMAR_CHOICES = [g.value for g in FieldGrammar]
BODY_CHOICES = [b.value for b in BodyLayout]


def _load(target: str) -> AnnotatedType:
    try:
        return load_target(target)
    except PayloadCollectionError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Payload Collection — build Postman collections from annotated types."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("target")
@click.option("-o", "--output", default=DEFAULT_OUTPUT, show_default=True, type=click.Path(path_type=Path), help="Output file for the collection JSON.")
@click.option("--grammar", default=FieldGrammar.DESCRIBED.value, type=click.Choice(GRAMMAR_CHOICES), help="Accepted `field` annotation shape.")
@click.option("--body", "body_layout", default=BodyLayout.MAPPING.value, type=click.Choice(BODY_CHOICES), help="Layout of the raw request body.")
@click.option("--name", "collection_name", default=None, help="Collection name.")
@click.option("--host-segments", default="api.example.com", show_default=True, help="Dotted host placed in the request URL.")
@click.option("--api-key", envvar="POSTMAN_API_KEY", default=None, help="Postman API key (env: POSTMAN_API_KEY).")
@click.option("--api-host", envvar="POSTMAN_API_HOST", default=DEFAULT_API_HOST, show_default=True, help="Postman API base URL (env: POSTMAN_API_HOST).")
@click.option("--timeout", default=30.0, show_default=True, type=float, help="Publish timeout in seconds.")
@click.option("--no-publish", is_flag=True, help="Only write the file, even if an API key is set.")
def build(
    target: str,
    output: Path,
    grammar: str,
    body_layout: str,
    collection_name: str | None,
    host_segments: str,
    api_key: str | None,
    api_host: str,
    timeout: float,
    no_publish: bool,
):
    """Generate a collection from TARGET (manifest file or MODULE:CLASS)."""
    annotated = _load(target)
    click.echo(f"Reading annotations of {annotated.name}...")

    option_kwargs = dict(
        host=host_segments.split("."),
        field_grammar=FieldGrammar(grammar),
        body_layout=BodyLayout(body_layout),
    )
    if collection_name:
        option_kwargs["collection_name"] = collection_name
    options = BuildOptions(**option_kwargs)

    try:
        collection = generate_collection(annotated, options)
        method = collection.item[0].request.method
        config = PublishConfig(api_key=None if no_publish else api_key, host=api_host, timeout=timeout)
        result = emit(collection, method, output, config)
    except PayloadCollectionError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"cannot write {output}: {e}") from e

    click.echo(f"Postman collection written to {result.path}")
    if result.uid:
        click.echo(f"Published collection, uid: {result.uid}")
    elif result.error:
        click.echo(f"Warning: publish failed: {result.error}", err=True)
    elif not no_publish:
        click.echo("No POSTMAN_API_KEY set, skipping publish.")


@main.command()
@click.argument("target")
@click.option("--grammar", default=FieldGrammar.DESCRIBED.value, type=click.Choice(GRAMMAR_CHOICES), help="Accepted `field` annotation shape.")
def check(target: str, grammar: str):
    """Parse the annotations of TARGET and print the descriptors."""
    annotated = _load(target)

    try:
        endpoint = resolve_endpoint(annotated)
        fields = collect_fields(annotated, FieldGrammar(grammar))
    except PayloadCollectionError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{annotated.name}: {endpoint.method} {endpoint.path}")
    for f in fields:
        click.echo(f"  {f.name}: {f.description or '-'} (example: {f.example})")
    click.echo(f"Found {len(fields)} annotated fields.")
