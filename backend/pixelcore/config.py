# backend/pixelcore/config.py
import os

# Labeling: provisional labels the merge table can hold (label 0 included).
MERGE_TABLE_CAPACITY = int(os.getenv("PIXELCORE_MERGE_TABLE_CAPACITY", "1024"))

# Gray level above which a pixel counts as foreground.
THRESHOLD = int(os.getenv("PIXELCORE_THRESHOLD", "127"))

# Upper bound on objects enumerated from one image.
MAX_OBJECTS = int(os.getenv("PIXELCORE_MAX_OBJECTS", "64"))

LOG_LEVEL = os.getenv("PIXELCORE_LOG_LEVEL", "INFO")

CORS_ORIGINS = os.getenv("PIXELCORE_CORS_ORIGINS", "*").split(",")

# When set, every analysis writes merge_table.txt and labels.txt here.
DUMP_DIR = os.getenv("PIXELCORE_DUMP_DIR") or None
