"""Cadence transaction and script templates.

Contract imports are placeholders (``${TopShot}``) filled in per Flow
network by ``render``.
"""

from string import Template

from flowgenie.errors import ConfigError
from flowgenie.utils.constants import CONTRACT_ADDRESSES

PURCHASE_NFT = Template("""
import NonFungibleToken from ${NonFungibleToken}
import TopShot from ${TopShot}
import TopShotMarket from ${TopShotMarket}
import FungibleToken from ${FungibleToken}
import FlowToken from ${FlowToken}

transaction(marketplaceAddress: Address, nftId: UInt64, price: UFix64) {
  let paymentVault: &FlowToken.Vault{FungibleToken.Receiver}
  let topShotCollection: &TopShot.Collection{NonFungibleToken.CollectionPublic}
  let marketplace: &TopShotMarket.Marketplace

  prepare(acct: AuthAccount) {
    self.paymentVault = acct.getCapability(/public/flowTokenReceiver)
      .borrow<&FlowToken.Vault{FungibleToken.Receiver}>()
      ?? panic("Could not borrow payment vault")

    self.topShotCollection = acct.getCapability(/public/topshotCollection)
      .borrow<&TopShot.Collection{NonFungibleToken.CollectionPublic}>()
      ?? panic("Could not borrow TopShot collection")

    self.marketplace = getAccount(marketplaceAddress)
      .getCapability(/public/topshotMarket)
      .borrow<&TopShotMarket.Marketplace>()
      ?? panic("Could not borrow marketplace")
  }

  execute {
    self.marketplace.purchase(tokenID: nftId, price: price, recipient: self.topShotCollection)
  }
}
""")

LIST_NFT_FOR_SALE = Template("""
import NonFungibleToken from ${NonFungibleToken}
import TopShot from ${TopShot}
import TopShotMarket from ${TopShotMarket}

transaction(marketplaceAddress: Address, nftId: UInt64, price: UFix64) {
  let topShotCollection: &TopShot.Collection{NonFungibleToken.Provider}
  let marketplace: &TopShotMarket.Marketplace

  prepare(acct: AuthAccount) {
    self.topShotCollection = acct.getCapability(/private/topshotCollection)
      .borrow<&TopShot.Collection{NonFungibleToken.Provider}>()
      ?? panic("Could not borrow TopShot collection")

    self.marketplace = getAccount(marketplaceAddress)
      .getCapability(/public/topshotMarket)
      .borrow<&TopShotMarket.Marketplace>()
      ?? panic("Could not borrow marketplace")
  }

  execute {
    self.marketplace.listForSale(tokenID: nftId, price: price)
  }
}
""")

PORTFOLIO_MOMENTS = Template("""
import NonFungibleToken from ${NonFungibleToken}
import TopShot from ${TopShot}

pub fun main(address: Address): [TopShot.MomentData] {
  let account = getAccount(address)
  let collection = account.getCapability(/public/topshotCollection)
    .borrow<&TopShot.Collection{NonFungibleToken.CollectionPublic}>()
    ?? panic("Could not borrow TopShot collection")

  let moments: [TopShot.MomentData] = []
  for id in collection.getIDs() {
    if let moment = collection.borrowMoment(id: id) {
      moments.append(moment.getData())
    }
  }
  return moments
}
""")

FLOW_BALANCE = Template("""
import FungibleToken from ${FungibleToken}
import FlowToken from ${FlowToken}

pub fun main(address: Address): UFix64 {
  let vault = getAccount(address)
    .getCapability(/public/flowTokenBalance)
    .borrow<&FlowToken.Vault{FungibleToken.Balance}>()
    ?? panic("Could not borrow balance reference")
  return vault.balance
}
""")


def contract_addresses(network: str) -> dict[str, str]:
    try:
        return CONTRACT_ADDRESSES[network]
    except KeyError:
        raise ConfigError(
            f"No contract addresses for Flow network {network!r}; use one of {sorted(CONTRACT_ADDRESSES)}"
        ) from None


def render(template: Template, network: str) -> str:
    """Fill in the contract imports for the given network."""
    return template.substitute(contract_addresses(network))
