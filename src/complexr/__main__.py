from .running import cli

cli()
