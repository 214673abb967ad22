from reddit_proxy.cli import app

app(prog_name="reddit-proxy")
