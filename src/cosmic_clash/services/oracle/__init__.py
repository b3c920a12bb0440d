"""Oracle access: protocol, Gemini implementation, reply parsing and errors."""
