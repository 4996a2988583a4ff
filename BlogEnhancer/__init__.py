"""Blog article acquisition and enhancement pipeline."""
