from grantsync.cli import cli

cli(prog_name="grantsync")
