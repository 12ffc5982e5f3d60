"""Application-wide constants."""

PROJECT_NAME = "Conductor"
PROJECT_DESCRIPTION = "LibreTexts Conductor: Commons catalog, collections, peer review and analytics API"
VERSION = "1.0.0"
API_V1_STR = "/api/v1"

# Organization identifier of the central LibreCommons instance.
LIBRETEXTS_ORG_ID = "libretexts"
