from rgcleanup.main import cli

cli()
