from credsync.ui.cli import run

run()
