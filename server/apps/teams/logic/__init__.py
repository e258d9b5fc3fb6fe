"""Business logic for teams: membership, roles and node provisioning."""
