"""DriveShare: file uploads with public, private and share-link access."""
