"""Chat engine services: intent classification, reply composition, request handling."""
