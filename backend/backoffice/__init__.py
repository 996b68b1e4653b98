"""Back-office domain: entities, gateways and list-management workflows."""
