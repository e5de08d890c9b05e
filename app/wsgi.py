from app.savishkar import create_app

app = create_app()
