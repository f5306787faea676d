# run.py
import os
from app import create_app

app = create_app()


if __name__ == '__main__':
    app.run(debug=os.getenv('FLASK_DEBUG', '1') == '1', port=int(os.getenv('PORT', 5000)))
