"""Gallery Gateway: student art-show submissions and exports."""
