import unittest

from contracts.commands import (
    COMMAND_NAMES,
    COMMANDS_WITH_SECONDS,
    PAUSE_PRESETS_SECONDS,
    menu_presets,
    preset_label,
)


class CommandPresetTests(unittest.TestCase):
    def test_preset_label_uses_minutes_and_whole_hours(self) -> None:
        self.assertEqual("1 minute", preset_label(60))
        self.assertEqual("5 minutes", preset_label(300))
        self.assertEqual("45 minutes", preset_label(2700))
        self.assertEqual("1 hour", preset_label(3600))
        self.assertEqual("24 hours", preset_label(86400))
        self.assertEqual("90 minutes", preset_label(5400))

    def test_menu_presets_cover_extend_and_pause(self) -> None:
        presets = menu_presets()

        self.assertEqual(
            [{"seconds": 60, "label": "Add 1 minute"}, {"seconds": 300, "label": "Add 5 minutes"}],
            presets["extend"],
        )
        self.assertEqual(
            list(PAUSE_PRESETS_SECONDS),
            [entry["seconds"] for entry in presets["pause_for"]],
        )
        self.assertEqual("10 minutes", presets["pause_for"][0]["label"])
        self.assertEqual("24 hours", presets["pause_for"][-1]["label"])

    def test_preset_commands_take_seconds(self) -> None:
        self.assertLessEqual(set(menu_presets()), set(COMMANDS_WITH_SECONDS))
        self.assertLessEqual(set(COMMANDS_WITH_SECONDS), set(COMMAND_NAMES))


if __name__ == "__main__":
    unittest.main()
