import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///housie.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list of origins allowed to open the socket / call the API
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '').split(',') if o.strip()] or None
    # Draw loop timings (milliseconds)
    CALL_INTERVAL_MS = int(os.environ.get('CALL_INTERVAL_MS', '4000'))
    COUNTDOWN_MS = int(os.environ.get('COUNTDOWN_MS', '3000'))
    # Attempts at finding a free 4-digit room code before giving up
    ROOM_CODE_ATTEMPTS = int(os.environ.get('ROOM_CODE_ATTEMPTS', '100'))
    # Solo rooms are filled with these bots
    BOT_NAMES = ('Lucky Bot', 'Clever Bot')
    AVATAR_URL = os.environ.get('AVATAR_URL') or 'https://api.dicebear.com/7.x/avataaars/svg?seed={seed}'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
