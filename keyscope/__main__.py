from keyscope.cli import app

app()
