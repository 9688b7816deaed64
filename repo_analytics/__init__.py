"""Repository snapshot aggregation over the GitHub GraphQL and REST APIs."""
