from podarchive.cli import app

app(prog_name="podarchive")
