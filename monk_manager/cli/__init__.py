"""Terminal surface: interactive chat loop, explain command and entry point."""
