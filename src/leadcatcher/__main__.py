from leadcatcher.cli import app

app()
