"""Process core for the GitHub labeler: wiring, migrations, and health."""
