from tabtracker import create_app

app = create_app()
