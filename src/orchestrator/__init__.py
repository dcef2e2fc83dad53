"""Model gateway, tool router and the conversation loop."""
