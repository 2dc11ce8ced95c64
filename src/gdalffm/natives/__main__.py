from gdalffm.natives import cli

if __name__ == "__main__":
    cli.cli()
