"""Infrastructure adapters (Notion, Gemini, in-memory fakes, text utilities)"""
