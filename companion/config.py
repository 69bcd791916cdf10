"""Environment-driven configuration."""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

APP_NAME = "Compliance Companion"
APP_VERSION = "1.0.0"

DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./compliance.db')

ALLOW_ORIGINS: List[str] = os.getenv('ALLOW_ORIGINS', '*').split(',')

DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

MAX_UPLOAD_SIZE_MB = int(os.getenv('MAX_UPLOAD_SIZE_MB', '5'))
MAX_UPLOAD_SIZE = MAX_UPLOAD_SIZE_MB * 1024 * 1024

UPLOAD_HISTORY_LIMIT = int(os.getenv('UPLOAD_HISTORY_LIMIT', '10'))

# Semester choices offered on the upload page; the first one is the default
semesters_str = os.getenv('SEMESTERS', 'Fall 2025,Spring 2025,Summer 2025,Fall 2024,Spring 2024')
SEMESTERS: List[str] = [s.strip() for s in semesters_str.split(',') if s.strip()]
DEFAULT_SEMESTER = SEMESTERS[0] if SEMESTERS else 'Fall 2025'
