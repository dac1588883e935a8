"""Session client: transport, outbound queue and audio capture bridge."""
