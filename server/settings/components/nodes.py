"""Simulated storage node settings."""

from server.settings.components import config

# Capacity given to every node provisioned for a new team (1 GB)
NODE_DEFAULT_CAPACITY_BYTES = config(
    'NODE_DEFAULT_CAPACITY_BYTES',
    cast=int,
    default=1024 * 1024 * 1024,
)

# Backup nodes provisioned next to the primary node (0-2)
NODE_DEFAULT_BACKUP_COUNT = config(
    'NODE_DEFAULT_BACKUP_COUNT',
    cast=int,
    default=2,
)
