"""Settings for production, values come from the environment."""

from decouple import Csv

from server.settings.components import config

DEBUG = False

SECRET_KEY = config('DJANGO_SECRET_KEY')

ALLOWED_HOSTS = config('DOMAIN_NAME', cast=Csv())
