import json
import logging

import click

from .cli_utils import reconstruct_command_line
from .pipeline import GeneratorConfig, PipelineGenerator, PropertiesBackend, YamlBackend, load_contract


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--binder", "-b", default=None, type=click.Choice(["kafka", "rabbit", "solace"]))
@click.option("--view", default=None, type=click.Choice(["provider", "client"]))
@click.option("--package-name", "-p", default=None, type=str, help="Package the data classes are generated into")
@click.option(
    "--format",
    "-f",
    "output_format",
    default="json",
    type=click.Choice(["json", "properties", "yaml"]),
    help="json writes the full IR, properties/yaml write the binding configuration",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def asyncapi_to_code(config, binder, view, package_name, output_format, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI options override the config file
    if binder is not None:
        config.binder = binder
    if view is not None:
        config.view = view
    if package_name is not None:
        config.package_name = package_name

    try:
        contract = load_contract(path)
        ir = PipelineGenerator(contract, config).generate()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    command_line = reconstruct_command_line(asyncapi_to_code)
    if output_format == "properties":
        out = PropertiesBackend(config, command_line).generate(ir)
    elif output_format == "yaml":
        out = YamlBackend(config, command_line).generate(ir)
    else:
        out = json.dumps(ir.to_dict(), indent=2) + "\n"

    with open(output, "w") as f:
        f.write(out)
