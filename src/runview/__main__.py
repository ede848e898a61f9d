from runview.cli.main import cli

cli()
