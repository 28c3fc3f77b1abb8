from tindahan import create_app

app = create_app()
