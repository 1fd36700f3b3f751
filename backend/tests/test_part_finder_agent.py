import pytest

from agent import prompts
from agent.client import AIServiceError, SolutionContractError
from agent.part_finder_agent import identify_part
from models import Locale


async def test_part_identified_from_service(live_mode, fake_client):
    client = fake_client(content={
        "partName": "Fill valve",
        "modelNumber": " ",
        "description": "Refills the cistern after a flush.",
        "purchaseLocations": ["Bunnings"],
        "installationVideo": "https://example.com/fill-valve",
    })

    part = await identify_part("AAAA", "image/png", Locale.AUSTRALIA, client=client)

    assert part.part_name == "Fill valve"
    assert part.model_number is None
    assert part.installation_video == "https://example.com/fill-valve"
    request = client.calls[0]
    system, user = request["messages"]
    assert "Australia" in system["content"]
    assert user["content"] == [{"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}]
    assert request["response_format"]["json_schema"]["schema"] is prompts.PART_SCHEMA


async def test_unreadable_part_is_a_contract_error(live_mode, fake_client):
    client = fake_client(content={"modelNumber": "1225"})

    with pytest.raises(SolutionContractError, match="clearer photo"):
        await identify_part("AAAA", "image/png", client=client)


async def test_service_failure_mapped(live_mode, fake_client):
    client = fake_client(error=RuntimeError("model overloaded"))

    with pytest.raises(AIServiceError) as exc_info:
        await identify_part("AAAA", "image/png", client=client)
    assert str(exc_info.value) == "Failed to identify part: model overloaded"


async def test_mock_part_without_credential(mock_mode, fake_client):
    client = fake_client()

    part = await identify_part("AAAA", "image/png", client=client)

    assert part.part_name == prompts.MOCK_PART["partName"]
    assert client.calls == []
