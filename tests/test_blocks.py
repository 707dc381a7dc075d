import unittest

from coachnudge.slack.blocks import progress_reply_blocks, update_blocks_with_completion


def digest_blocks():
    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": "*Good morning, Ann!*"}},
        {
            "type": "section", "block_id": "action_1",
            "text": {"type": "mrkdwn", "text": "☐ Call mentor"},
            "accessory": {"type": "button", "action_id": "complete_action_item", "value": "1"},
        },
        {
            "type": "section", "block_id": "action_2",
            "text": {"type": "mrkdwn", "text": "☐ Write plan"},
            "accessory": {"type": "button", "action_id": "complete_action_item", "value": "2"},
        },
        {"type": "context", "elements": [{"type": "mrkdwn", "text": "2 pending items"}]},
    ]


class TestCompletionBlocks(unittest.TestCase):
    def test_completed_item_loses_button_and_counter_updates(self):
        updated = update_blocks_with_completion(digest_blocks(), "1")

        self.assertEqual(updated[0]["text"]["text"], "*Good morning, Ann!*")
        self.assertEqual(updated[1]["text"]["text"], "✅ ~Call mentor~ Done!")
        self.assertNotIn("accessory", updated[1])
        self.assertIn("accessory", updated[2])
        self.assertEqual(updated[-1]["elements"][0]["text"], "1 pending • 1 completed")
        self.assertEqual(sum(1 for b in updated if b["type"] == "context"), 1)

    def test_applying_twice_is_stable(self):
        once = update_blocks_with_completion(digest_blocks(), "1")
        twice = update_blocks_with_completion(once, "1")
        self.assertEqual(once, twice)

    def test_all_done_footer(self):
        step = update_blocks_with_completion(digest_blocks(), "1")
        done = update_blocks_with_completion(step, "2")
        self.assertEqual(done[-1]["elements"][0]["text"], "🎉 All done! 2 items completed")

    def test_input_blocks_are_not_mutated(self):
        blocks = digest_blocks()
        update_blocks_with_completion(blocks, "2")
        self.assertEqual(blocks, digest_blocks())

    def test_progress_reply(self):
        blocks = progress_reply_blocks("progress_stuck")
        self.assertIn(":construction:", blocks[0]["text"]["text"])


if __name__ == '__main__':
    unittest.main()
