"""DevMatch admin console: report moderation workflow."""
