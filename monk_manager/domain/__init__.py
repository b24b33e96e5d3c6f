"""Domain layer: shared models and error taxonomy.

- models: ModelConfig / Message / Conversation.
- exceptions: BusinessError and the AIError family.
"""
