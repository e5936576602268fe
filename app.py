import os

from assetvault import create_app

app = create_app()

if __name__ == "__main__":
    # Local development server; storage backend comes from STORAGE_BACKEND / S3_BUCKET
    app.logger.info(f"Serving asset images from the {app.extensions['storage'].name} backend")
    app.run(
        debug=app.config.get("DEBUG", True),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
    )
