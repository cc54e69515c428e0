# vacancy_rag/__main__.py
from vacancy_rag.cli.cli import app

if __name__ == "__main__":
    app()
