"""Series orchestration: settings, inputs, GitHub access and the run itself."""
