from .base import *

DEBUG = True

INSTALLED_APPS += [
    'django.contrib.humanize',
]

REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
    "rest_framework.authentication.SessionAuthentication",
    "rest_framework.authentication.BasicAuthentication",
]

LOGGING["loggers"]["apps"]["level"] = "DEBUG"
