"""Domain layer: collaborator protocols the core depends on."""
