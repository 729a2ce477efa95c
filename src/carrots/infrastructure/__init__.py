"""Infrastructure: GitHub access, authentication and HTTP sessions."""
