"""Test package for the Binary Trainer.

Core tests exercise the codec, the bounded value controller, challenge
sessions and the timed drill without pygame.  The smoke tests run the UI
headlessly using SDL's dummy video driver.  Run ``pytest`` from the project
root.
"""
