"""Infrastructure: configuration, cache, change notifier and record stores."""
