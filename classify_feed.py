"""
classify_feed.py — entry-point shim.

All logic lives in feed_classifier.pipeline.classification.
This file is kept at the project root so ``python classify_feed.py --input feed.json``
works without installing the package.
"""

from feed_classifier.pipeline.classification import main_cli

if __name__ == "__main__":
    main_cli()
