"""Social media copy generation for news articles."""
